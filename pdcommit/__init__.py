"""
Pipedream Commit Helper

Workflow-aware commit messages for Pipedream projects.
"""

__version__ = "1.0.0"

# Mapping file schema written by init/sync; anything else only triggers a warning
SCHEMA_VERSION = "baudevs/2024-09-29"

COMMIT_TYPES = {
    'add': 'New workflow, step or capability',
    'fix': 'A bug fix',
    'change': 'Change to existing behavior',
    'remove': 'Removal of a workflow, step or capability',
}

COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())
