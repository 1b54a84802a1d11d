"""wabf - phone number pattern scanner for messaging directories."""

from wabf.config import APP_VERSION as __version__
