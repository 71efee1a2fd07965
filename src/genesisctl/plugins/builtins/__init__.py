"""Built-in plugins registered by every PluginManager."""
