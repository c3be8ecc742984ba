from middleware.errors import register_error_handlers
from middleware.auth import require_session

__all__ = ['register_error_handlers', 'require_session']
