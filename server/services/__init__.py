from .auth import AuthService
from .matchmaking import MatchmakingService, generate_match_code

__all__ = ["AuthService", "MatchmakingService", "generate_match_code"]
