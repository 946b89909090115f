from hackmate.config import Settings
from hackmate.gateway.base import (
    PROFILE_SKILLS_JOIN,
    PROFILES,
    SKILLS,
    USER_SKILL_ROWS_JOIN,
    USER_SKILLS,
    Gateway,
    GatewayError,
    JoinSpec,
)


def build_gateway(settings: Settings) -> Gateway:
    if settings.gateway_backend == "rest":
        from hackmate.gateway.rest import RestGateway

        if not settings.gateway_url or not settings.gateway_api_key:
            raise RuntimeError("GATEWAY_URL and GATEWAY_API_KEY are required when GATEWAY_BACKEND=rest")
        return RestGateway(
            settings.gateway_url,
            settings.gateway_api_key,
            timeout=settings.gateway_timeout_seconds,
        )

    from hackmate.gateway.sql import SqlGateway

    return SqlGateway()


__all__ = [
	"PROFILE_SKILLS_JOIN",
	"PROFILES",
	"SKILLS",
	"USER_SKILL_ROWS_JOIN",
	"USER_SKILLS",
	"Gateway",
	"GatewayError",
	"JoinSpec",
	"build_gateway",
]
