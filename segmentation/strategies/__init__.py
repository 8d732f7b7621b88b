"""
Strategies shared by the segmentation steps: the pattern catalog, header
and username rules, continuation markers and the message-start chain.
"""
