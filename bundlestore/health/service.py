from urllib.parse import urlparse
import socket
from bundlestore import config
import bundlestore.infra.supabase_client as supabase_client

def _check_table(client, name: str):
    try:
        res = client.table(name).select("id").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info():
    """Diagnostic: résolution DNS de SUPABASE_URL, sonde des tables users/orders,
    présence des clés Paystack (jamais leur valeur)."""
    parsed = urlparse(config.SUPABASE_URL) if config.SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": config.SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
        "paystack_configured": bool(config.PAYSTACK_SECRET_KEY and config.PAYSTACK_PUBLIC_KEY),
    }
    try:
        client = supabase_client.get_service_supabase()
        for t in ("users", "orders"):
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info
