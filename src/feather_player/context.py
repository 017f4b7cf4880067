"""Application context for explicit state passing.

AppContext bundles the long-lived collaborators the UI state machine talks
to. The UI state itself is a separate value (UIState) threaded through the
main loop.
"""

from dataclasses import dataclass
from typing import Any

from feather_player.core.config import Config
from feather_player.domain.provider.base import ProviderClient


@dataclass
class AppContext:
    """Application context passed to command and message handlers.

    Attributes:
        config: Application configuration
        provider: Remote content source (search, stream resolution)
        player: Player controller (load/toggle/seek/set_volume/stop); results
            arrive as messages, never as return values
        jobs: Background job runner (submit/post/shutdown)
    """

    config: Config
    provider: ProviderClient
    player: Any
    jobs: Any
