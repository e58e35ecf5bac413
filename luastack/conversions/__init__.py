# Marshallers for table- and function-shaped host values. Each push leaves
# exactly one slot on the stack and each get leaves the depth unchanged.
