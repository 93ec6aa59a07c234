from .auth import auth_bp
from .health import health_bp
