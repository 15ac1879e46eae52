"""Built-in task implementations"""
