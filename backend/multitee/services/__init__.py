"""Node services"""
