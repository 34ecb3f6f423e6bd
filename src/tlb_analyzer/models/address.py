"""
Address arithmetic for the two-level guest + extended paging scheme.

Guest addresses are 32 bits with 4KB pages. The extended (host) page table
is modelled as a fixed two-level table rooted at physical address 0:

    L1 table: 4096 entries x 4 bytes at [0x0000, 0x4000)
              indexed by addr[31:20]
    L2 tables: 256 entries x 4 bytes each, starting at 16KB
              table chosen by addr[31:20], entry by addr[19:12]

Resolving a guest address through the extended table therefore touches
one L1 descriptor and one L2 descriptor, whose addresses are returned by
host_descriptor_addresses().
"""

from __future__ import annotations

from typing import Tuple

PAGE_SHIFT = 12
PAGE_MASK = 0xFFFFF000

# Key shifts used to pick the cache set for a tag
PAGE_KEY_SHIFT = PAGE_SHIFT  # page-granular caches (nested TLB)
DESCRIPTOR_KEY_SHIFT = 2     # descriptor-address caches (page walk cache)

# Domain tags for descriptor-address caches
HOST_DOMAIN = 0   # extended page table descriptor
GUEST_DOMAIN = 1  # guest page table entry

HOST_L1_ENTRY_SIZE = 4
HOST_L2_TABLE_BASE = 16 * 1024
HOST_L2_TABLE_SIZE = 1024


def page_align(address: int) -> int:
    """Clear the page offset of a 32-bit address."""
    return address & PAGE_MASK


def host_descriptor_addresses(address: int) -> Tuple[int, int]:
    """
    Compute the extended page table descriptors that translate an address.

    Args:
        address: Guest physical address (32-bit).

    Returns:
        Tuple of (l1_descriptor_address, l2_descriptor_address).
    """
    section = address >> 20
    l1_host = section * HOST_L1_ENTRY_SIZE
    l2_host = (
        HOST_L2_TABLE_BASE
        + section * HOST_L2_TABLE_SIZE
        + ((address >> PAGE_SHIFT) & 0xFF) * 4
    )
    return l1_host, l2_host
