"""closuredeps: dependency-first file ordering for provide/require source trees."""

__version__ = "0.1.0"
