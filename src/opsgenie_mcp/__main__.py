from opsgenie_mcp.cli.main import main

main()
