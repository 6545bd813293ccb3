"""
Test configuration: point the settings loader at the test config before
anything under homequote is imported.
"""
import os

os.environ.setdefault(
    "HOMEQUOTE_CONFIG",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.test.yaml"),
)
