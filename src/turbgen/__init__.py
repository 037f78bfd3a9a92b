import logging

try:
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise ImportError("Rich library is required for logging.")


handler = RichHandler(
    console=Console(width=120),
    show_time=False,
    show_level=False,
    show_path=False
)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[handler]
)
logger = logging.getLogger("turbgen")


from .io import Params, ConfigurationError, HDF5Writer, read_restart  # noqa: E402
from .modes import Modes, SpectralForm, ModeOverflowError, build_modes  # noqa: E402
from .rng import RandomState  # noqa: E402
from .ou import OUProcess  # noqa: E402
from .generator import TurbulenceGenerator, init_turbulence_generator  # noqa: E402
from .sampler import FieldSampler  # noqa: E402


__all__ = [
    'logger',
    'Params',
    'ConfigurationError',
    'HDF5Writer',
    'read_restart',
    'Modes',
    'SpectralForm',
    'ModeOverflowError',
    'build_modes',
    'RandomState',
    'OUProcess',
    'TurbulenceGenerator',
    'init_turbulence_generator',
    'FieldSampler',
]
