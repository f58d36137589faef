"""Security tests for GearBin tenant isolation and authentication"""
