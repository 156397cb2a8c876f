"""
Static reader for compiled JVM class files.

Only what test discovery needs is decoded: the class name, the methods with
their access flags and the types of their runtime-visible annotations. No
class is ever loaded.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..validation import ClassFileFormatError

logger = logging.getLogger(__name__)

CLASS_FILE_MAGIC = 0xCAFEBABE
ACC_PUBLIC = 0x0001
ACC_ABSTRACT = 0x0400

RUNTIME_VISIBLE_ANNOTATIONS = "RuntimeVisibleAnnotations"

# Annotation type descriptors marking test methods
JUNIT_TEST_ANNOTATIONS = ("Lorg/junit/Test;", "Lorg/junit/jupiter/api/Test;")

# Constant pool tags
_UTF8 = 1
_LONG = 5
_DOUBLE = 6
_CLASS = 7
# Sizes of the entries skipped without decoding, by tag
_FIXED_SIZE_ENTRIES = {
    3: 4,   # Integer
    4: 4,   # Float
    5: 8,   # Long
    6: 8,   # Double
    7: 2,   # Class
    8: 2,   # String
    9: 4,   # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}


@dataclass(frozen=True)
class MethodInfo:
    name: str
    descriptor: str
    access_flags: int
    annotations: Tuple[str, ...] = ()

    @property
    def is_public(self) -> bool:
        return bool(self.access_flags & ACC_PUBLIC)


@dataclass(frozen=True)
class ClassFileInfo:
    """Decoded summary of a class file."""
    class_name: str
    access_flags: int
    methods: Tuple[MethodInfo, ...]

    def test_methods(self, annotations: Tuple[str, ...] = JUNIT_TEST_ANNOTATIONS) -> List[str]:
        """Names of public methods carrying one of `annotations`, in declaration order."""
        return [
            method.name for method in self.methods
            if method.is_public and any(annotation in annotations for annotation in method.annotations)
        ]


class _Reader:
    """Big-endian cursor over class file bytes."""

    def __init__(self, data: bytes, source: Optional[str]):
        self.data = data
        self.offset = 0
        self.source = source

    def _take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ClassFileFormatError(
                f"Unexpected end of class file at offset {self.offset} (needed {size} more bytes)", self.source
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u1(self) -> int:
        return self._take(1)[0]

    def u2(self) -> int:
        return struct.unpack(">H", self._take(2))[0]

    def u4(self) -> int:
        return struct.unpack(">I", self._take(4))[0]

    def skip(self, size: int) -> None:
        self._take(size)

    def read(self, size: int) -> bytes:
        return self._take(size)


def _read_constant_pool(reader: _Reader) -> Dict[int, Tuple[int, object]]:
    count = reader.u2()
    pool: Dict[int, Tuple[int, object]] = {}
    index = 1
    while index < count:
        tag = reader.u1()
        if tag == _UTF8:
            length = reader.u2()
            pool[index] = (tag, reader.read(length).decode("utf-8", errors="replace"))
        elif tag == _CLASS:
            pool[index] = (tag, reader.u2())
        elif tag in _FIXED_SIZE_ENTRIES:
            reader.skip(_FIXED_SIZE_ENTRIES[tag])
            pool[index] = (tag, None)
        else:
            raise ClassFileFormatError(f"Unknown constant pool tag {tag} at entry {index}", reader.source)
        # Long and Double take two entries
        index += 2 if tag in (_LONG, _DOUBLE) else 1
    return pool


def _utf8(pool: Dict[int, Tuple[int, object]], index: int, source: Optional[str]) -> str:
    entry = pool.get(index)
    if entry is None or entry[0] != _UTF8:
        raise ClassFileFormatError(f"Constant pool entry {index} is not a UTF-8 string", source)
    return entry[1]


def _skip_element_value(reader: _Reader) -> None:
    tag = chr(reader.u1())
    if tag in "BCDFIJSZs":
        reader.skip(2)
    elif tag == "e":
        reader.skip(4)
    elif tag == "c":
        reader.skip(2)
    elif tag == "@":
        _skip_annotation_body(reader)
    elif tag == "[":
        for _ in range(reader.u2()):
            _skip_element_value(reader)
    else:
        raise ClassFileFormatError(f"Unknown annotation element tag '{tag}'", reader.source)


def _skip_annotation_body(reader: _Reader) -> None:
    reader.skip(2)  # type_index
    for _ in range(reader.u2()):
        reader.skip(2)  # element_name_index
        _skip_element_value(reader)


def _read_annotation_types(data: bytes, pool, source: Optional[str]) -> List[str]:
    reader = _Reader(data, source)
    types = []
    for _ in range(reader.u2()):
        types.append(_utf8(pool, reader.u2(), source))
        for _ in range(reader.u2()):
            reader.skip(2)
            _skip_element_value(reader)
    return types


def _read_members(reader: _Reader, pool, collect_annotations: bool) -> List[MethodInfo]:
    members = []
    for _ in range(reader.u2()):
        access_flags = reader.u2()
        name = _utf8(pool, reader.u2(), reader.source)
        descriptor = _utf8(pool, reader.u2(), reader.source)
        annotations: List[str] = []
        for _ in range(reader.u2()):
            attribute_name = _utf8(pool, reader.u2(), reader.source)
            attribute_data = reader.read(reader.u4())
            if collect_annotations and attribute_name == RUNTIME_VISIBLE_ANNOTATIONS:
                annotations.extend(_read_annotation_types(attribute_data, pool, reader.source))
        members.append(MethodInfo(name, descriptor, access_flags, tuple(annotations)))
    return members


def parse_class_file(data: bytes, source: Optional[str] = None) -> ClassFileInfo:
    """
    Decode a class file.

    Raises:
        ClassFileFormatError: If the data is not a well-formed class file
    """
    reader = _Reader(data, source)
    if reader.u4() != CLASS_FILE_MAGIC:
        raise ClassFileFormatError("Not a class file: bad magic number", source)
    reader.skip(4)  # minor and major version

    pool = _read_constant_pool(reader)
    access_flags = reader.u2()

    this_class = pool.get(reader.u2())
    if this_class is None or this_class[0] != _CLASS:
        raise ClassFileFormatError("this_class does not reference a Class constant", source)
    class_name = _utf8(pool, this_class[1], source).replace("/", ".")

    reader.skip(2)  # super_class
    reader.skip(2 * reader.u2())  # interfaces

    _read_members(reader, pool, collect_annotations=False)  # fields
    methods = _read_members(reader, pool, collect_annotations=True)

    return ClassFileInfo(class_name=class_name, access_flags=access_flags, methods=tuple(methods))


def read_class_file(path: Union[str, Path]) -> ClassFileInfo:
    """
    Read and decode a class file from disk.

    Raises:
        ClassFileFormatError: If the file cannot be read or decoded
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ClassFileFormatError(f"Cannot read class file: {e}", str(path)) from e
    return parse_class_file(data, str(path))
