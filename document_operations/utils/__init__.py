"""
Utility modules for document operations.
"""

from .timing import TimingResult, OperationStats, OperationTimer
from .xml_codec import element_to_dict, dict_to_xml, encode_name, parse_xml

__all__ = [
    'TimingResult',
    'OperationStats',
    'OperationTimer',
    'element_to_dict',
    'dict_to_xml',
    'encode_name',
    'parse_xml'
]
