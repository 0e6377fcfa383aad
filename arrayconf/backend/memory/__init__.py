from arrayconf.backend.memory.heap import CAllocator, LifecycleManager

__all__ = ['CAllocator', 'LifecycleManager']
