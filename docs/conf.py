import os
import sys

sys.path.insert(0, os.path.abspath(".."))

project = "Echo Brain"
copyright = "2026, Echo Brain contributors"
author = "Echo Brain contributors"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "myst_parser",
]

templates_path = ["_templates"]
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

html_theme = "sphinx_rtd_theme"

autodoc_typehints = "description"
autodoc_member_order = "bysource"
