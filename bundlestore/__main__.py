"""
Point d'entrée principal.

Usage:
    python -m bundlestore

Variables d'environnement:
- PORT: port d'écoute (par défaut 8000)
- UVICORN_RELOAD: active le reload auto en dev ("1"/"true"/"yes")
- LOG_LEVEL: niveau de logs uvicorn (ex: "info", "debug")
"""
import os
import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "bundlestore.asgi:app",
        host="0.0.0.0",
        port=port,
        reload=reload_flag,
        log_level=os.environ.get("LOG_LEVEL", "info"),
    )
