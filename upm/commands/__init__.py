"""
upm commands.

One module per operation flag; every command loads the file database,
applies its change and writes the database back.
"""
