"""
Instruction codec, processor, ledger and repository adapters, client builders.
"""
