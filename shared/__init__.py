"""
Locus Shared Module
===================

Configuration, logging and console presentation shared by the Locus
packages.
"""
