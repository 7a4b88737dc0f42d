import json
import unittest

from models import Results, UserInfo
from report.renderer import render


def sample(start='2024-01-01', end='2024-01-31'):
    user = UserInfo('secret-account-id', 'ada@example.com', 'Ada Lovelace', 'Europe/London')
    # 12h 34m 56s
    return Results(user, 12 * 3600 + 34 * 60 + 56, start, end)


class TestRenderer(unittest.TestCase):
    def test_split_into_hours_minutes_seconds(self):
        res = sample()
        self.assertEqual((res.hours, res.minutes, res.seconds), (12, 34, 56))

    def test_text(self):
        out = render(sample(), 'text')
        lines = out.split('\n')
        self.assertEqual(lines[0], 'Ada Lovelace' + ' ' * 13 + '   Hours Minutes')
        self.assertEqual(lines[1], '2024-01-01 - 2024-01-31:       12      34')

    def test_json_omits_account_id_and_open_bounds(self):
        parsed = json.loads(render(sample(start='', end=''), 'json'))
        self.assertNotIn('start', parsed)
        self.assertNotIn('end', parsed)
        self.assertNotIn('accountId', parsed['user'])
        self.assertEqual(parsed['totalSeconds'], 45296)
        self.assertEqual(parsed['user']['displayName'], 'Ada Lovelace')

    def test_indent(self):
        out = render(sample(), 'indent')
        self.assertIn('\n    "user"', out)
        self.assertEqual(json.loads(out)['start'], '2024-01-01')

    def test_csv(self):
        self.assertEqual(
            render(sample(), 'csv'),
            'Ada Lovelace,ada@example.com,2024-01-01,2024-01-31,Europe/London,12,34,45296',
        )

    def test_unknown_format(self):
        with self.assertRaises(ValueError):
            render(sample(), 'html')


if __name__ == '__main__':
    unittest.main()
