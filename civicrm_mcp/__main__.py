from civicrm_mcp import serve

serve()
