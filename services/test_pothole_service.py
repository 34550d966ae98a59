import tempfile
from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock, patch

from anyio import Path

from db import Database
from exceptions import NotFoundError, PayloadTooLargeError, UnsupportedMediaTypeError, ValidationError
from models.acting_user import ActingUser
from models.db.user import User
from models.pothole_status import PotholeStatus
from models.pothole_submission import ImageUpload, PotholeSubmission
from models.user_role import UserRole
from services.image_store import ImageStore
from services.pothole_repository import PotholeRepository
from services.pothole_service import PotholeService

MiB = 1024 * 1024


def _submission(image: ImageUpload | None = None, **overrides) -> PotholeSubmission:
    fields = {
        'distance': '2.75',
        'longitude': '77.5946',
        'latitude': '12.9716',
        'vehicle_name': 'Truck 7',
        'vehicle_ground_level': '0.35',
        'image': image if image is not None else ImageUpload(b'\xff\xd8\xff', 'hole.jpg', 'image/jpeg'),
    }
    fields.update(overrides)
    return PotholeSubmission(**fields)


class TestPotholeService(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.db = Database(f'sqlite+aiosqlite:///{self._tmp.name}/test.db')
        await self.db.create_all()

        self.uploads = Path(self._tmp.name) / 'uploads'
        self.image_store = ImageStore(
            self.uploads,
            '/public/uploads',
            content_types={'image/jpeg', 'image/jpg', 'image/png'},
            extensions={'.jpeg', '.jpg', '.png'},
            max_file_size=5 * MiB,
        )
        await self.image_store.ensure_root()

        self.repository = PotholeRepository(self.db)
        self.service = PotholeService(self.repository, self.image_store)

        reporter = User(name='Driver', email='driver@example.com', role=UserRole.USER)
        admin = User(name='Admin', email='admin@example.com', role=UserRole.ADMIN)
        async with self.db.write() as session:
            session.add_all((reporter, admin))

        self.user = ActingUser(id=reporter.id, role=UserRole.USER)
        self.admin = ActingUser(id=admin.id, role=UserRole.ADMIN)

    async def asyncTearDown(self):
        await self.db.dispose()
        self._tmp.cleanup()

    async def _record_count(self) -> int:
        return (await self.repository.find(None, 1, 100)).total_count

    async def _file_count(self) -> int:
        return len([p async for p in self.uploads.iterdir()])

    async def test_register__stores_pending_report(self):
        record = await self.service.register(_submission(), self.user)

        self.assertEqual(record.status, PotholeStatus.PENDING)
        self.assertEqual(record.created_at, record.updated_at)
        self.assertEqual(record.distance, 2.75)
        self.assertEqual(record.gps.longitude, 77.5946)
        self.assertEqual(record.gps.latitude, 12.9716)
        self.assertEqual(record.vehicle_ground_level, 0.35)
        self.assertEqual(record.vehicle_name, 'Truck 7')
        self.assertEqual(record.reported_by.id, self.user.id)
        self.assertEqual(record.reported_by.email, 'driver@example.com')
        self.assertTrue(await self.image_store.exists(record.image_ref))

    async def test_register__accepts_numbers(self):
        submission = _submission(distance=4, longitude=-0.1276, latitude=51.5072, vehicle_ground_level=0.2)

        record = await self.service.register(submission, self.user)

        self.assertEqual(record.distance, 4.0)
        self.assertEqual(record.gps.longitude, -0.1276)

    async def test_register__requires_image(self):
        submission = PotholeSubmission(
            distance='1.2',
            longitude='77.59',
            latitude='12.97',
            vehicle_name='Truck 7',
            vehicle_ground_level='0.3',
        )

        with self.assertRaises(ValidationError) as ctx:
            await self.service.register(submission, self.user)

        self.assertEqual(ctx.exception.message, 'Image is required')
        self.assertEqual(await self._record_count(), 0)

    async def test_register__rejects_non_numeric_fields(self):
        for field in ('distance', 'longitude', 'latitude', 'vehicle_ground_level'):
            for raw in ('abc', '', '   ', None, 'nan', 'inf'):
                with self.subTest(field=field, raw=raw), self.assertRaises(ValidationError):
                    await self.service.register(_submission(**{field: raw}), self.user)

        self.assertEqual(await self._record_count(), 0)
        self.assertEqual(await self._file_count(), 0)

    async def test_register__rejects_out_of_range_values(self):
        for overrides in (
            {'distance': '0'},
            {'distance': '-3'},
            {'longitude': '180.5'},
            {'latitude': '-91'},
            {'vehicle_name': '  '},
            {'vehicle_name': None},
        ):
            with self.subTest(overrides=overrides), self.assertRaises(ValidationError):
                await self.service.register(_submission(**overrides), self.user)

        self.assertEqual(await self._record_count(), 0)

    async def test_register__oversized_image_leaves_nothing_behind(self):
        image = ImageUpload(b'\x00' * (6 * MiB), 'big.jpg', 'image/jpeg')

        with self.assertRaises(PayloadTooLargeError):
            await self.service.register(_submission(image=image), self.user)

        self.assertEqual(await self._record_count(), 0)
        self.assertEqual(await self._file_count(), 0)

    async def test_register__unsupported_image_type(self):
        image = ImageUpload(b'GIF89a', 'hole.gif', 'image/gif')

        with self.assertRaises(UnsupportedMediaTypeError):
            await self.service.register(_submission(image=image), self.user)

        self.assertEqual(await self._record_count(), 0)

    async def test_update_status__any_to_any(self):
        record = await self.service.register(_submission(), self.user)

        for status in ('inprocess', 'completed', 'pending', 'completed', 'inprocess'):
            updated = await self.service.update_status(record.id, status, self.admin)
            self.assertEqual(updated.status, status)
            self.assertEqual(updated.created_at, record.created_at)
            self.assertGreaterEqual(updated.updated_at, record.updated_at)
            self.assertEqual(updated.image_ref, record.image_ref)
            self.assertEqual(updated.reported_by, record.reported_by)
            self.assertEqual(updated.gps, record.gps)

    async def test_update_status__invalid_value_leaves_record_unchanged(self):
        record = await self.service.register(_submission(), self.user)

        for status in ('archived', 'PENDING', '', None):
            with self.subTest(status=status), self.assertRaises(ValidationError):
                await self.service.update_status(record.id, status, self.admin)

        self.assertEqual(await self.repository.get_by_id(record.id), record)

    async def test_update_status__invalid_value_checked_before_lookup(self):
        with self.assertRaises(ValidationError):
            await self.service.update_status('missing', 'archived', self.admin)

    async def test_update_status__not_found(self):
        with self.assertRaises(NotFoundError):
            await self.service.update_status('missing', 'completed', self.admin)

    async def test_remove__deletes_record_and_image(self):
        record = await self.service.register(_submission(), self.user)

        await self.service.remove(record.id, self.admin)

        with self.assertRaises(NotFoundError):
            await self.repository.get_by_id(record.id)
        self.assertFalse(await self.image_store.exists(record.image_ref))
        self.assertEqual((await self.repository.find(None, 1, 10)).items, ())

    async def test_remove__not_found(self):
        with self.assertRaises(NotFoundError):
            await self.service.remove('missing', self.admin)

    async def test_remove__image_already_gone(self):
        record = await self.service.register(_submission(), self.user)
        await self.image_store.path_of(record.image_ref).unlink()

        await self.service.remove(record.id, self.admin)

        self.assertEqual(await self._record_count(), 0)

    async def test_remove__image_delete_failure_does_not_block_record_deletion(self):
        record = await self.service.register(_submission(), self.user)

        with patch.object(self.image_store, 'delete', AsyncMock(side_effect=PermissionError('read-only'))):
            await self.service.remove(record.id, self.admin)

        self.assertEqual(await self._record_count(), 0)

    async def test_register__unknown_reporter(self):
        with self.assertRaises(ValidationError):
            await self.service.register(_submission(), ActingUser(id='ghost'))

        result = await self.repository.find(None, 1, 10)
        self.assertEqual(result.total_count, 0)
        self.assertEqual(result.items, ())

    async def test_remove__image_reference_outside_store(self):
        record = await self.service.register(_submission(), self.user)
        self.image_store.url_prefix = '/static/potholes'

        await self.service.remove(record.id, self.admin)

        self.assertEqual(await self._record_count(), 0)
