from pathlib import Path
import numpy as np
import h5py
import json
from turbgen import logger


class ConfigurationError(ValueError):
    """Missing parameter file, missing key or invalid parameter value."""


class Params:
    """
    Parameters of the turbulence generator.

    The parameter file holds one ``key = value`` pair per line; everything after ``#`` or ``!`` is
    a comment. A file with the suffix ``.json`` is read as a JSON object with the same keys.

    Parameters
    ----------
    parameter_file : str or Path
        Path of the parameter file.
    """

    _required = {
        'ndim': int,
        'xmin': float,
        'xmax': float,
        'ymin': float,
        'ymax': float,
        'zmin': float,
        'zmax': float,
        'velocity': float,
        'k_driv': float,
        'k_min': float,
        'k_max': float,
        'sol_weight': float,
        'spect_form': int,
        'power_law_exp': float,
        'angles_exp': float,
        'energy_coeff': float,
        'random_seed': int,
        'nsteps_per_turnover_time': int,
    }

    _optional = {
        'debug': (int, 0),
    }

    def __init__(self, parameter_file='turbulence_generator.inp'):
        self.parameter_file = str(parameter_file)
        self._load(Path(parameter_file))
        self._check_compatibility()

    def __repr__(self):
        return f"<Params {self.__dict__}>"

    @classmethod
    def from_dict(cls, data: dict, parameter_file: str = '<dict>'):
        """Create parameters from a dictionary holding the same keys as a parameter file."""
        params = cls.__new__(cls)
        params.parameter_file = parameter_file
        params._read_params(data)
        params._check_compatibility()
        return params

    def _load(self, parameter_file: Path):
        if not parameter_file.is_file():
            raise ConfigurationError(f"cannot access parameter file '{parameter_file}'.")

        try:
            text = parameter_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"could not open parameter file '{parameter_file}': {e}") from e

        if parameter_file.suffix.casefold() == '.json':
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Error reading JSON file {parameter_file}: {e}") from e
        else:
            data = self._parse_key_value(text)

        self._read_params(data)

    @staticmethod
    def _parse_key_value(text: str) -> dict:
        data = {}
        for line in text.splitlines():
            for comment in ('#', '!'):
                line = line.split(comment, 1)[0]
            if '=' not in line:
                continue
            key, value = line.split('=', 1)
            # the first occurrence of a key wins
            data.setdefault(key.strip(), value.strip())
        return data

    def _read_params(self, data: dict):
        for key, dtype in self._required.items():
            if key not in data:
                raise ConfigurationError(
                    f"requested parameter '{key}' not found in file '{self.parameter_file}'."
                )
            setattr(self, key, self._convert(key, data[key], dtype))

        for key, (dtype, default) in self._optional.items():
            setattr(self, key, self._convert(key, data.get(key, default), dtype))

    def _convert(self, key, value, dtype):
        try:
            return dtype(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"invalid value '{value}' for parameter '{key}' in file '{self.parameter_file}'."
            ) from e

    def _check_compatibility(self):
        """Check the parameters for consistency."""
        checks = [
            (self.ndim in (1, 2, 3), "ndim must be 1, 2 or 3."),
            (self.spect_form in (0, 1, 2), "spect_form must be 0 (Band), 1 (Parabola) or 2 (Power Law)."),
            (self.velocity > 0, "velocity must be positive."),
            (self.k_driv > 0, "k_driv must be positive."),
            (0 < self.k_min <= self.k_max, "the driving band must satisfy 0 < k_min <= k_max."),
            (0.0 <= self.sol_weight <= 1.0, "sol_weight must lie in [0, 1]."),
            (self.nsteps_per_turnover_time >= 1, "nsteps_per_turnover_time must be at least 1."),
            (not (self.ndim == 1 and self.sol_weight == 1.0), "a 1D field has no solenoidal modes; sol_weight must be < 1."),
        ]
        for axis in 'xyz'[:self.ndim]:
            checks.append(
                (getattr(self, f'{axis}max') > getattr(self, f'{axis}min'), f"{axis}max must be larger than {axis}min.")
            )

        for ok, message in checks:
            if not ok:
                raise ConfigurationError(f"{message} (parameter file '{self.parameter_file}')")

    def as_dict(self) -> dict:
        keys = list(self._required) + list(self._optional)
        return {key: getattr(self, key) for key in keys}

    def print(self):
        """Print the parameters in a human-readable format."""
        import pprint
        pprint.pprint(self.as_dict())

    def update(self, params: dict):
        """Update parameters from a dictionary."""
        for key, value in params.items():
            if key in self._required:
                setattr(self, key, self._convert(key, value, self._required[key]))
            elif key in self._optional:
                setattr(self, key, self._convert(key, value, self._optional[key][0]))
            else:
                raise ConfigurationError(f"Invalid parameter: {key}")
        self._check_compatibility()

    def docs(self):
        """Print documentation for all parameters."""
        docs = {
            "ndim": "Number of spatial dimensions (1, 2 or 3).",
            "xmin": "Lower bound of the domain in x.",
            "xmax": "Upper bound of the domain in x; Lx = xmax - xmin sets the wavenumber units 2pi/Lx.",
            "ymin": "Lower bound of the domain in y.",
            "ymax": "Upper bound of the domain in y.",
            "zmin": "Lower bound of the domain in z.",
            "zmax": "Upper bound of the domain in z.",
            "velocity": "Target turbulent velocity dispersion.",
            "k_driv": "Characteristic driving wavenumber in units of 2pi/Lx; sets the turnover time Lx / k_driv / velocity.",
            "k_min": "Minimum driving wavenumber in units of 2pi/Lx.",
            "k_max": "Maximum driving wavenumber in units of 2pi/Lx.",
            "sol_weight": "Solenoidal weight: 0.0 compressive, 0.5 natural mixture, 1.0 solenoidal.",
            "spect_form": "Spectral form: 0 (Band), 1 (Parabola), 2 (Power Law).",
            "power_law_exp": "Exponent of the power-law spectrum (spect_form = 2).",
            "angles_exp": "Exponent of the number of sampled angles per k-shell (spect_form = 2).",
            "energy_coeff": "Energy injection coefficient; energy = energy_coeff * velocity^3 / Lx.",
            "random_seed": "Seed of the random sequence.",
            "nsteps_per_turnover_time": "Number of driving patterns per turnover time.",
            "debug": "Enable or disable debug output.",
        }
        for key, doc in docs.items():
            print(f"{key}: {doc}")


class HDF5Writer:
    """
    Writer of turbulence snapshots sampled on a uniform grid.

    Layout of the file::

        x, y, z            grid coordinates
        vx/<step>, ...     field components of each driving pattern
        time/<step>        time at which the pattern was generated

    Parameters
    ----------
    file_name : str
        Name of the output file; ``.h5`` is appended if missing.
    mode : str, optional
        File mode used when creating the file. Default is 'w'.
    """

    _components = ('vx', 'vy', 'vz')

    def __init__(self, file_name: str, mode: str = 'w'):
        if not str(file_name).endswith('.h5'):
            file_name = f"{file_name}.h5"
        self.file_name = str(file_name)
        self.mode = mode
        self.f = None

        self._create_file()

    def _create_file(self):
        with h5py.File(self.file_name, self.mode) as f:
            for name in self._components + ('time',):
                f.require_group(name)

    def open(self, mode: str = 'r+'):
        self.f = h5py.File(self.file_name, mode=mode)

    def close(self):
        if self.f:
            self.f.close()
        self.f = None

    def write_grid(self, x: np.ndarray, y: np.ndarray, z: np.ndarray):
        self.open()
        for label, coord in zip('xyz', (x, y, z)):
            if label in self.f:
                del self.f[label]
            self.f.create_dataset(label, data=coord)
        self.close()

    def write_data(self, step: int, t: float, field: np.ndarray):
        self.open()
        for name, component in zip(self._components, field):
            self.f[name].create_dataset(str(step), data=component)
        self.f['time'].create_dataset(str(step), data=t)
        self.f.attrs['t'] = t
        self.f.attrs['step'] = step
        self.close()

    def read_data(self, step: int) -> np.ndarray:
        try:
            self.open('r')
            return np.stack([self.f[name][str(step)][()] for name in self._components])
        finally:
            self.close()

    @staticmethod
    def write_restart(file_name: str, state: dict, t: float = 0.0):
        """
        Write the state of a turbulence generator (see ``TurbulenceGenerator.state_dict``).
        """
        if not str(file_name).endswith('.h5'):
            file_name = f"{file_name}.h5"

        with h5py.File(file_name, 'w') as f:
            f.attrs['t'] = t
            f.attrs['step'] = state['step']
            f.attrs['n_modes'] = state['n_modes']
            f.attrs['random_seed'] = state['random_seed']
            f.create_dataset('phases', data=state['phases'])
            f.create_dataset('rng_state', data=state['rng_state'])
            grp = f.create_group('params')
            for key, value in state.get('params', {}).items():
                grp.attrs[key] = value

        logger.info(f"TurbGen: Restart file '{file_name}' written at step {state['step']}.")
        return file_name


def read_restart(file_name: str) -> dict:
    """Read a restart file written by ``HDF5Writer.write_restart``."""
    if not str(file_name).endswith('.h5'):
        file_name = f"{file_name}.h5"
    if not Path(file_name).is_file():
        raise FileNotFoundError(f"Restart file '{file_name}' not found.")

    with h5py.File(file_name, 'r') as f:
        required_attrs = ['t', 'step', 'n_modes', 'random_seed']
        for attr in required_attrs:
            if attr not in f.attrs:
                raise KeyError(f"read_restart(): Missing required attribute: {attr}")

        for name in ('phases', 'rng_state'):
            if name not in f:
                raise KeyError(f"read_restart(): Missing required dataset: {name}")

        return {
            't': float(f.attrs['t']),
            'step': int(f.attrs['step']),
            'n_modes': int(f.attrs['n_modes']),
            'random_seed': int(f.attrs['random_seed']),
            'phases': f['phases'][()],
            'rng_state': f['rng_state'][()],
            'params': {key: value.item() if hasattr(value, 'item') else value
                       for key, value in f['params'].attrs.items()} if 'params' in f else {},
        }
