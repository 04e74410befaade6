'''
General python utilities, which aren't specific to the Krylov propagator.

Methods / Classes in this one shouldn't require non-standard imports.
'''

class Freezable():
    'a class where you can freeze the fields (prevent new fields from being created)'

    _frozen = False

    def freeze_attrs(self):
        'prevents any new attributes from being created in the object'
        self._frozen = True

    def __setattr__(self, key, value):
        if self._frozen and not hasattr(self, key):
            raise TypeError("{} does not contain attribute '{}' (object was frozen)".format(self, key))

        object.__setattr__(self, key, value)

def matrix_to_string(m):
    'get a (small, dense) matrix as a string, one row per line'

    return "\n".join([", ".join(["{:.6g}".format(val) for val in row]) for row in m])
