"""Goal Getter - football score prediction backend."""

__version__ = "1.0.0"
