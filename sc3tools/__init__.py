# Tools for the string table of SC3 scripts
# for MAGES. engine visual novels (Chaos;Head, Steins;Gate, Robotics;Notes, ...)

__version__ = '2.1.0'
