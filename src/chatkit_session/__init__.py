"""
chatkit_session — ChatKit session token proxy Lambda package.

Entry point: chatkit_session.handler.handler
"""
