#!/usr/bin/env python3
import uvicorn
import os

if __name__ == "__main__":
    port = int(os.getenv("PORT", 5000))

    uvicorn.run(
        "carewatch.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("NODE_ENV", "development") == "development",
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )
