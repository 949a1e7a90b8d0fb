pytest_plugins = ["loadoutforge.testing.fixtures"]
