"""Event emitter for pipeline progress notifications."""

from typing import Callable, Dict, List


class SimpleEmitter:
    """Lightweight event emitter for pipeline progress.
    
    Lets the analysis pipeline report stages and per-file progress without
    knowing who is listening, keeping presentation out of the core.
    
    Example:
        >>> emitter = SimpleEmitter()
        >>> emitter.on('file:decoded', lambda **kw: print(f"{kw['name']}: {kw['line_count']}"))
        >>> emitter.emit('file:decoded', name='Main.java', line_count=12)
        Main.java: 12
    """
    
    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}
    
    def on(self, event: str, handler: Callable) -> 'SimpleEmitter':
        """Subscribe to an event.
        
        Args:
            event: Event name to listen for
            handler: Callable invoked with the event data as keyword arguments
        
        Returns:
            Self for method chaining
        """
        self._handlers.setdefault(event, []).append(handler)
        return self
    
    def emit(self, event: str, **data):
        """Call every handler registered for ``event`` with ``data``."""
        for handler in list(self._handlers.get(event, [])):
            handler(**data)
