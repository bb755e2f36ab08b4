from pathlib import Path

from pydantic_settings import BaseSettings

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = {"env_prefix": "SITEFIN_", "case_sensitive": False}

    # EASIUR health-damage datasets (sc_8.6MVSL_*.hdf5, sc_growth_rate_*.hdf5)
    easiur_data_dir: Path = _PACKAGE_DIR / "data" / "easiur"

    # Geodetic datum assumed for site coordinates
    default_datum: str = "NAD83"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
