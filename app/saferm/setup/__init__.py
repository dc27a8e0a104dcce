"""Deployment provisioning for the trash layout."""

from saferm.setup.provisioner import (
    SetupReport,
    TrashProvisioner,
    UserSetupResult,
    probe_placement_mode,
    render_alias_snippet,
    render_cron_line,
)

__all__ = [
    "SetupReport",
    "TrashProvisioner",
    "UserSetupResult",
    "probe_placement_mode",
    "render_alias_snippet",
    "render_cron_line",
]
