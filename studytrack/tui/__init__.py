"""Terminal dashboard: navigation shell, modules and runtime."""
