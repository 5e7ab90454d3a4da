"""Frontend package: Qt models and viewmodels that keep views in sync."""
