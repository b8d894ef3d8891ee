from typing import Any, Awaitable, Callable, Dict, Optional
from common.enums import ToolName
from common.models import ToolRequest, ToolResult
from handlers.image_tools import ImageTools

ToolHandler = Callable[[dict], Awaitable[ToolResult]]

class ToolDispatcher:
    '''
        Maps each supported tool to its handler. Adding a tool means adding
        a ToolName member and a registry entry.
    '''
    def __init__(self, tools: ImageTools):
        self.registry: Dict[ToolName, ToolHandler] = {
            ToolName.GENERATE_IMAGE: tools.generate_image,
            ToolName.MODIFY_IMAGE: tools.modify_image,
        }

    @property
    def tool_names(self) -> list[str]:
        return [tool.value for tool in self.registry]

    def resolve(self, name: Any) -> Optional[ToolHandler]:
        if not isinstance(name, str):
            return None
        try:
            return self.registry.get(ToolName(name))
        except ValueError:
            return None

    async def dispatch(self, request: ToolRequest) -> Optional[ToolResult]:
        '''Run the named tool; None means the tool is unknown.'''
        handler = self.resolve(request.name)
        if handler is None:
            return None
        return await handler(request.argument_dict())
