"""Allow running the server with ``python -m jq_mcp_server``."""
from jq_mcp_server.server import main

if __name__ == "__main__":
    main()
