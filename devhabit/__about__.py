__version__ = "1.0.0"
__description__ = "devhabit : habit tracking REST API with sorting, data shaping and hypermedia"
