"""
Version information for the MetroPlan application.

Centralized version management for the editor, its about dialog and the
configuration file version stamp.
"""

# Core application information
__version__ = "1.0.0"
__version_info__ = (1, 0, 0)
__app_name__ = "MetroPlan"
__app_display_name__ = "MetroPlan - Rail Network Editor"
__company__ = "MetroPlan"
__description__ = "Interactive rail transit network editor with simulation playback"

# Feature information
__features__ = [
    "Draw stations and directed track or walk links",
    "Build routes from a selection of stations and links",
    "Shortest paths computed by the external engine",
    "Simulation and schedule optimization with animated playback",
    "Stringline chart and station arrival statistics",
    "Graph and routes documents as JSON",
]

# Engine information
__engine_protocol__ = "JSON over HTTP"
__python_version_required__ = "3.9+"


def get_version_string() -> str:
    """Get formatted version string."""
    return f"{__app_name__} v{__version__}"


def get_about_text() -> str:
    """Get formatted about text for dialogs."""
    features_list = "\n".join(f"<li>{feature}</li>" for feature in __features__)

    return f"""
<h3>{__app_display_name__}</h3>
<p><b>Version {__version__}</b></p>
<p>{__description__}</p>

<p><b>Features:</b></p>
<ul>
{features_list}
</ul>

<p>Simulation engine protocol: {__engine_protocol__}</p>
"""
