"""ionic-scaffold: Ionic React application generator and verification pipeline."""

__version__ = "0.1.0"
