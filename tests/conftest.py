pytest_plugins = ["repobots.testing.conftest"]
