"""Collectors running external inspection tools."""

from locus.collectors.objdump import ObjdumpCollector

__all__ = ["ObjdumpCollector"]
