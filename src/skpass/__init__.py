"""
SKPass -- the sovereign password store.

One secret per file. Every file encrypted for exactly the keys its
directory declares. Change the declaration, and SKPass re-encrypts
what drifted, one commit per secret.

A smilinTux Open Source Project.
"""

import os

__version__ = "0.1.0"
__author__ = "smilinTux"

SKPASS_HOME = os.environ.get("SKPASS_HOME", "~/.skpass")
