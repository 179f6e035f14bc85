# ABOUTME: Domain components built on the gatehouse interfaces
# ABOUTME: Each subpackage implements the operations of one aggregate
