import numpy as np
from turbgen import Params, TurbulenceGenerator, FieldSampler


if __name__ == '__main__':
    params = Params('../../turbulence_generator.inp')
    # purely compressive driving in the x-y plane
    params.update({'ndim': 2, 'sol_weight': 0.0, 'spect_form': 0})

    generator = TurbulenceGenerator(params)
    sampler = FieldSampler(generator, n=128, t_end=generator.decay, output_file='driving_field_2d')
    sampler.run()

    v = sampler.sample()
    rms = np.sqrt(np.mean(v[0] ** 2 + v[1] ** 2))
    print(f"rms of the last driving pattern: {rms:.4e}")
