#!/usr/bin/env python3
"""Trade Journal Analytics - API Server"""

if __name__ == "__main__":
    import uvicorn

    from tradejournal.core.config import get_param, load_config

    cfg = load_config()
    host = get_param(cfg, "api", "host", default="127.0.0.1")
    port = get_param(cfg, "api", "port", default=8084)

    print("Starting API server...")
    print(f"API: http://{host}:{port}")
    print(f"Docs: http://{host}:{port}/docs")
    print("Press Ctrl+C to stop")
    print("-" * 40)
    uvicorn.run(
        "tradejournal.api.main:app",
        host=host,
        port=port,
        reload=False,
        log_level="error"
    )
