"""
Kernels for the solenoidal/compressive decomposition of the OU phases and for the evaluation of the
truncated Fourier series. Each kernel comes in a numpy version (``*_regular``) and a numba version
(``*_optimized``); the numba versions accumulate modes sequentially in mode order.
"""

import numpy as np
import numba as nb


def decomposition_regular(aka, akb, k, phase_a, phase_b, sol_weight, ndim):
    """
    Project the phases onto the directions perpendicular (solenoidal) and parallel (compressive)
    to the wavevector and mix them with the solenoidal weight. Axes beyond ``ndim`` are zero.
    """
    n_modes = k.shape[0]
    kk = np.zeros(n_modes)
    ka = np.zeros(n_modes)
    kb = np.zeros(n_modes)
    for j in range(ndim):
        kk = kk + k[:, j] * k[:, j]
        ka = ka + k[:, j] * phase_b[:, j]
        kb = kb + k[:, j] * phase_a[:, j]

    aka[:] = 0.0
    akb[:] = 0.0
    for j in range(ndim):
        diva = k[:, j] * ka / kk
        divb = k[:, j] * kb / kk
        curla = phase_a[:, j] - divb
        curlb = phase_b[:, j] - diva
        aka[:, j] = sol_weight * curla + (1.0 - sol_weight) * divb
        akb[:, j] = sol_weight * curlb + (1.0 - sol_weight) * diva


@nb.njit
def decomposition_optimized(aka, akb, k, phase_a, phase_b, sol_weight, ndim):
    n_modes = k.shape[0]

    for i in range(n_modes):
        ka = 0.0
        kb = 0.0
        kk = 0.0
        for j in range(ndim):
            kk = kk + k[i, j] * k[i, j]
            ka = ka + k[i, j] * phase_b[i, j]
            kb = kb + k[i, j] * phase_a[i, j]

        for j in range(3):
            if j < ndim:
                diva = k[i, j] * ka / kk
                divb = k[i, j] * kb / kk
                curla = phase_a[i, j] - divb
                curlb = phase_b[i, j] - diva
                aka[i, j] = sol_weight * curla + (1.0 - sol_weight) * divb
                akb[i, j] = sol_weight * curlb + (1.0 - sol_weight) * diva
            else:
                aka[i, j] = 0.0
                akb[i, j] = 0.0


def axis_trig_regular(k_axis, coord):
    arg = k_axis * coord
    return np.sin(arg), np.cos(arg)


@nb.njit
def axis_trig_optimized(k_axis, coord):
    n = k_axis.shape[0]
    s = np.empty(n)
    c = np.empty(n)
    for m in range(n):
        arg = k_axis[m] * coord
        s[m] = np.sin(arg)
        c[m] = np.cos(arg)
    return s, c


def turb_vector_regular(sinx, cosx, siny, cosy, sinz, cosz, coef, aka, akb):
    """
    Field at one point from the per-axis trigonometric tables of all modes.
    ``coef`` is ``2 * sol_weight_norm * amplitude`` per mode.
    """
    # real and imaginary parts of exp(i k.x)
    real = (cosx * cosy - sinx * siny) * cosz - (sinx * cosy + cosx * siny) * sinz
    imag = cosx * (cosy * sinz + siny * cosz) + sinx * (cosy * cosz - siny * sinz)

    v = (coef * real) @ aka - (coef * imag) @ akb
    return v[0], v[1], v[2]


@nb.njit
def turb_vector_optimized(sinx, cosx, siny, cosy, sinz, cosz, coef, aka, akb):
    vx = 0.0
    vy = 0.0
    vz = 0.0
    for m in range(coef.shape[0]):
        real = (cosx[m] * cosy[m] - sinx[m] * siny[m]) * cosz[m] - (sinx[m] * cosy[m] + cosx[m] * siny[m]) * sinz[m]
        imag = cosx[m] * (cosy[m] * sinz[m] + siny[m] * cosz[m]) + sinx[m] * (cosy[m] * cosz[m] - siny[m] * sinz[m])
        vx += coef[m] * (aka[m, 0] * real - akb[m, 0] * imag)
        vy += coef[m] * (aka[m, 1] * real - akb[m, 1] * imag)
        vz += coef[m] * (aka[m, 2] * real - akb[m, 2] * imag)
    return vx, vy, vz


def points_regular(v, points, k, coef, aka, akb):
    """Field at scattered points, ``points`` of shape (N, 3), into ``v`` of shape (N, 3)."""
    sx = np.sin(np.outer(points[:, 0], k[:, 0]))
    cx = np.cos(np.outer(points[:, 0], k[:, 0]))
    sy = np.sin(np.outer(points[:, 1], k[:, 1]))
    cy = np.cos(np.outer(points[:, 1], k[:, 1]))
    sz = np.sin(np.outer(points[:, 2], k[:, 2]))
    cz = np.cos(np.outer(points[:, 2], k[:, 2]))

    real = (cx * cy - sx * sy) * cz - (sx * cy + cx * sy) * sz
    imag = cx * (cy * sz + sy * cz) + sx * (cy * cz - sy * sz)

    v[:] = (real * coef) @ aka - (imag * coef) @ akb


@nb.njit
def points_optimized(v, points, k, coef, aka, akb):
    for p in range(points.shape[0]):
        x, y, z = points[p, 0], points[p, 1], points[p, 2]
        vx = 0.0
        vy = 0.0
        vz = 0.0
        for m in range(coef.shape[0]):
            sx, cx = np.sin(k[m, 0] * x), np.cos(k[m, 0] * x)
            sy, cy = np.sin(k[m, 1] * y), np.cos(k[m, 1] * y)
            sz, cz = np.sin(k[m, 2] * z), np.cos(k[m, 2] * z)
            real = (cx * cy - sx * sy) * cz - (sx * cy + cx * sy) * sz
            imag = cx * (cy * sz + sy * cz) + sx * (cy * cz - sy * sz)
            vx += coef[m] * (aka[m, 0] * real - akb[m, 0] * imag)
            vy += coef[m] * (aka[m, 1] * real - akb[m, 1] * imag)
            vz += coef[m] * (aka[m, 2] * real - akb[m, 2] * imag)
        v[p, 0] = vx
        v[p, 1] = vy
        v[p, 2] = vz


def grid_regular(v, x, y, z, k, coef, aka, akb):
    """
    Field on the tensor grid spanned by the 1-D coordinates ``x, y, z`` into ``v`` of shape
    (3, nx, ny, nz). The sin/cos tables of every axis are computed once.
    """
    sx, cx = np.sin(np.outer(k[:, 0], x)), np.cos(np.outer(k[:, 0], x))
    sy, cy = np.sin(np.outer(k[:, 1], y)), np.cos(np.outer(k[:, 1], y))
    sz, cz = np.sin(np.outer(k[:, 2], z)), np.cos(np.outer(k[:, 2], z))

    v[:] = 0.0
    for m in range(coef.shape[0]):
        # cos and sin of kx*x + ky*y
        cxy = np.outer(cx[m], cy[m]) - np.outer(sx[m], sy[m])
        sxy = np.outer(sx[m], cy[m]) + np.outer(cx[m], sy[m])
        real = cxy[:, :, None] * cz[m] - sxy[:, :, None] * sz[m]
        imag = sxy[:, :, None] * cz[m] + cxy[:, :, None] * sz[m]
        for d in range(3):
            v[d] += coef[m] * (aka[m, d] * real - akb[m, d] * imag)


@nb.njit
def grid_optimized(v, x, y, z, k, coef, aka, akb):
    n_modes = coef.shape[0]
    sx = np.empty((n_modes, x.shape[0]))
    cx = np.empty((n_modes, x.shape[0]))
    sy = np.empty((n_modes, y.shape[0]))
    cy = np.empty((n_modes, y.shape[0]))
    sz = np.empty((n_modes, z.shape[0]))
    cz = np.empty((n_modes, z.shape[0]))
    for m in range(n_modes):
        for i in range(x.shape[0]):
            sx[m, i] = np.sin(k[m, 0] * x[i])
            cx[m, i] = np.cos(k[m, 0] * x[i])
        for j in range(y.shape[0]):
            sy[m, j] = np.sin(k[m, 1] * y[j])
            cy[m, j] = np.cos(k[m, 1] * y[j])
        for l in range(z.shape[0]):
            sz[m, l] = np.sin(k[m, 2] * z[l])
            cz[m, l] = np.cos(k[m, 2] * z[l])

    for i in range(x.shape[0]):
        for j in range(y.shape[0]):
            for l in range(z.shape[0]):
                vx = 0.0
                vy = 0.0
                vz = 0.0
                for m in range(n_modes):
                    real = (cx[m, i] * cy[m, j] - sx[m, i] * sy[m, j]) * cz[m, l] \
                        - (sx[m, i] * cy[m, j] + cx[m, i] * sy[m, j]) * sz[m, l]
                    imag = cx[m, i] * (cy[m, j] * sz[m, l] + sy[m, j] * cz[m, l]) \
                        + sx[m, i] * (cy[m, j] * cz[m, l] - sy[m, j] * sz[m, l])
                    vx += coef[m] * (aka[m, 0] * real - akb[m, 0] * imag)
                    vy += coef[m] * (aka[m, 1] * real - akb[m, 1] * imag)
                    vz += coef[m] * (aka[m, 2] * real - akb[m, 2] * imag)
                v[0, i, j, l] = vx
                v[1, i, j, l] = vy
                v[2, i, j, l] = vz
