"""
Variable environments
Scopes live in an arena and are addressed by integer handles; each scope
records its enclosing handle, so nesting never involves owning references
"""

from typing import Any, Dict, Optional

from error_handling import LoxRuntimeError


GLOBAL_SCOPE = 0


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_scope(parent: Optional[int] = None) -> Dict:
  """Create a scope record"""
  return {
      'parent': parent,
      'bindings': {}
  }


def make_arena() -> Dict:
  """Create an arena holding just the global scope"""
  return {
      'scopes': {GLOBAL_SCOPE: make_scope()},
      'next_handle': GLOBAL_SCOPE + 1
  }


# ============================================================================
# SCOPE LIFECYCLE
# ============================================================================

def push_scope(arena: Dict, parent: int) -> int:
  """Open a scope enclosed by parent; returns its handle"""
  if parent not in arena['scopes']:
    raise KeyError(f"No live scope with handle {parent}")

  handle = arena['next_handle']
  arena['next_handle'] += 1
  arena['scopes'][handle] = make_scope(parent)
  return handle


def pop_scope(arena: Dict, handle: int) -> Optional[int]:
  """Discard a scope; returns its enclosing handle"""
  if handle == GLOBAL_SCOPE:
    raise ValueError("The global scope cannot be popped")
  return arena['scopes'].pop(handle)['parent']


def scope_depth(arena: Dict, handle: int) -> int:
  """Number of enclosing links between handle and the global scope"""
  depth = 0
  parent = arena['scopes'][handle]['parent']
  while parent is not None:
    depth += 1
    parent = arena['scopes'][parent]['parent']
  return depth


# ============================================================================
# BINDINGS
# ============================================================================

def define(arena: Dict, handle: int, name: str, value: Any) -> None:
  """Bind name in this scope only, shadowing any enclosing binding"""
  arena['scopes'][handle]['bindings'][name] = value


def find_scope(arena: Dict, handle: int, name: str) -> Optional[Dict]:
  """Walk outward from handle to the first scope that binds name"""
  current = handle
  while current is not None:
    scope = arena['scopes'][current]
    if name in scope['bindings']:
      return scope
    current = scope['parent']
  return None


def get(arena: Dict, handle: int, name) -> Any:
  """Look up a variable token's current value"""
  scope = find_scope(arena, handle, name.lexeme)
  if scope is None:
    raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
  return scope['bindings'][name.lexeme]


def assign(arena: Dict, handle: int, name, value: Any) -> None:
  """Update the nearest existing binding; never creates one"""
  scope = find_scope(arena, handle, name.lexeme)
  if scope is None:
    raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
  scope['bindings'][name.lexeme] = value
