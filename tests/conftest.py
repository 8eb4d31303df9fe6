import os
import sys

# Ensure the src directory is on sys.path so tests can import handlers.* and common.*
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
	sys.path.insert(0, ROOT)
