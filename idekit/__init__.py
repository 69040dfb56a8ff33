"""idekit - local identity and account state manager for desktop IDE installs."""

from loguru import logger

__version__ = "0.3.0"
__logo__ = "🪪"

logger.disable("idekit")
