"""CustomTkinter presentation layer: shell, navigation and kiosk views."""
