pytest_plugins = ["autowired.integrations.pytest_plugin"]
