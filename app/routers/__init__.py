# app/routers/__init__.py

from .auth.auth_router import router as auth_router
from .auth.magic_router import router as magic_router

from .quotes.quote_router import router as quote_router


__all__ = [
"auth_router",
"magic_router",

"quote_router",
]
