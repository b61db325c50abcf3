from typing import Final

__prog__: Final = "hiscore"
__version__: Final = "0.1.0"
