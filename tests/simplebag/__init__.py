from unittest import TestLoader, TestSuite

def additional_tests():
    from . import (test_constants, test_pathcodec, test_digest, test_tagfile,
                   test_manifest, test_make, test_cli, test_interop)

    mods = dict(locals())
    suites = [TestLoader().loadTestsFromModule(m[1])
                     for m in mods.items() if m[0].startswith("test_")]
    return TestSuite(suites)
