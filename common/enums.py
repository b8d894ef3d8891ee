from enum import Enum

class ToolName(Enum):
    GENERATE_IMAGE = 'generate_image'
    MODIFY_IMAGE = 'modify_image'

class ImageCategory(Enum):
    GENERATED = 'generated'
    MODIFIED = 'modified'
