from unittest import TestCase

from icsparser.lib.python_utilities import to_normal_str


class TestUtils(TestCase):
    def test_to_normal_str(self):
        # fmt: off
        self.assertEqual(to_normal_str('blatti'), 'blatti')
        self.assertEqual(to_normal_str(b'blatti'), 'blatti')
        self.assertEqual(to_normal_str(b'a\r\nb'), 'a\nb')
        self.assertEqual(to_normal_str('\ufeffBEGIN:VCALENDAR'), 'BEGIN:VCALENDAR')
        self.assertEqual(to_normal_str('blåbær'.encode('utf-8')), 'blåbær')
        self.assertEqual(to_normal_str(''), '')
        self.assertEqual(to_normal_str(b''), '')
        self.assertEqual(to_normal_str(None), None)
        # fmt: on
