"""Bot Program Compiler Service."""
