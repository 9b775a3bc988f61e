"""
Settings for dirshell.

Example:
    ```python
    from dirshell.settings import ShellSettings

    settings = ShellSettings()  # DIRSHELL_* environment variables
    config = settings.to_sandbox_config()
    ```
"""

from dirshell.settings.config import ShellSettings

__all__ = ["ShellSettings"]
