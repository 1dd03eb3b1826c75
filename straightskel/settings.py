import math
from configparser import ConfigParser, Error as ConfigError
from pathlib import Path
from typing import Any, Optional, Union

SECTION = "skeleton"


class Settings:
    """
    Ini file backed store of string values, keyed by section and then by key.

    Values are read from the file when the store is created and only go back to disk
    on `write_configuration`. Missing or unreadable files leave the store empty.
    """

    def __init__(self, filename=None, ignore_settings=False):
        self._config_file = Path(filename) if filename is not None else None
        self._config_dict = {}
        if not ignore_settings and self._config_file is not None:
            self.read_configuration()

    def read_configuration(self):
        parser = ConfigParser(interpolation=None)
        try:
            parser.read(self._config_file, encoding="utf-8")
        except (PermissionError, ConfigError):
            return
        for section in parser.sections():
            self._config_dict.setdefault(section, {}).update(parser.items(section))

    def write_configuration(self):
        if self._config_file is None:
            return
        parser = ConfigParser(interpolation=None)
        parser.read_dict(self._config_dict)
        try:
            with open(self._config_file, "w", encoding="utf-8") as fp:
                parser.write(fp)
        except (PermissionError, FileNotFoundError):
            return

    def read_persistent(
        self,
        t: type,
        section: str,
        key: str,
        default: Union[str, int, float, bool, None] = None,
    ) -> Any:
        """
        Read one value from the store converted to the given type.

        @param t: datatype.
        @param section: storing section
        @param key: reference item
        @param default: returned when the item is missing or does not convert.
        @return: value
        """
        try:
            value = self._config_dict[section][key]
            if t == bool:
                return value == "True"
            return t(value)
        except (KeyError, ValueError):
            return default

    def write_persistent(self, section: str, key: str, value: Union[str, int, float, bool]):
        if isinstance(value, (str, int, float, bool)):
            self._config_dict.setdefault(section, {})[str(key)] = str(value)



class SkeletonSettings:
    """
    Numerical tolerances and policy values used during construction and offsetting.

    epsilon: relative tolerance, scaled by the polygon size, for lengths and positions.
    parallel_tolerance: angle in radians below which two edges count as parallel.
    area_tolerance: relative tolerance, scaled by the squared polygon size, under which a
        wavefront component counts as collapsed.
    exterior_margin_factor: default exterior bound as a multiple of the bounding box diagonal.
    max_events_factor: the builder gives up after max_events_factor * n * n applied events.
    """

    def __init__(self, **kwargs):
        self.epsilon = 1e-9
        self.parallel_tolerance = 1e-9
        self.area_tolerance = 1e-9
        self.exterior_margin_factor = 1.0
        self.max_events_factor = 8
        for key, value in kwargs.items():
            if key not in self.__dict__:
                raise TypeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    def __repr__(self):
        values = ", ".join(f"{k}={v!r}" for k, v in self.__dict__.items())
        return f"SkeletonSettings({values})"

    def __eq__(self, other):
        if not isinstance(other, SkeletonSettings):
            return NotImplemented
        return self.__dict__ == other.__dict__

    @property
    def sin_parallel(self):
        return math.sin(self.parallel_tolerance)

    def read_persistent_attributes(self, settings: Settings, section: str = SECTION):
        for key, value in self.__dict__.items():
            if key.startswith("_"):
                continue
            read_value = settings.read_persistent(type(value), section, key)
            if read_value is None:
                continue
            setattr(self, key, read_value)

    def write_persistent_attributes(self, settings: Settings, section: str = SECTION):
        for key, value in self.__dict__.items():
            if key.startswith("_"):
                continue
            settings.write_persistent(section, key, value)

    @classmethod
    def load(cls, filename: Optional[Union[str, Path]]):
        """
        Read settings from an ini file. Missing files and missing keys keep the defaults.
        """
        instance = cls()
        if filename is None:
            return instance
        instance.read_persistent_attributes(Settings(filename))
        return instance

    def save(self, filename: Union[str, Path]):
        settings = Settings(filename, ignore_settings=True)
        self.write_persistent_attributes(settings)
        settings.write_configuration()


DEFAULT_SETTINGS = SkeletonSettings()
