"""Registry pre-loaded with the built-in tools."""

from config.config_loader import ToolsConfig
from src.tools.local_files import build_local_file_tools
from src.tools.registry import ToolRegistry
from src.tools.web_search import build_web_search_tool


def build_default_registry(config: ToolsConfig) -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(
        build_web_search_tool(
            api_key_env=config.web_search_api_key_env,
            max_results=config.web_search_max_results,
            timeout_sec=config.web_search_timeout_sec,
        )
    )
    for tool in build_local_file_tools(config.local_files_dir):
        registry.register(tool)
    return registry
