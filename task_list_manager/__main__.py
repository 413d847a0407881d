from task_list_manager.interface.mcp_server import main

raise SystemExit(main())
