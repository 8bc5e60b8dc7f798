"""
Lifecycle document models: indents, orders, inwards, QC, job works, outwards, movements
"""
